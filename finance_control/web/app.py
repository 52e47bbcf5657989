from flask import Flask, render_template, request, jsonify, Response
from flask_socketio import SocketIO
import csv
import io
import logging
from finance_control.backend import config
from finance_control.backend.manager import FinanceManager
from finance_control.backend.errors import ValidationError, NotFoundError
from finance_control.backend.months import current_month_key, month_title, add_months, is_month_key
from finance_control.backend.ledger import format_brl

config.configure_logging()
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['SECRET_KEY'] = config.SECRET_KEY
socketio = SocketIO(app, cors_allowed_origins="*")

manager = FinanceManager(backend=config.STORAGE_BACKEND, file_path=config.data_path())

app.jinja_env.filters['brl'] = format_brl
app.jinja_env.filters['month_title'] = month_title


def notify(kind, action, **extra):
    """Tell connected pages that stored data changed"""
    socketio.emit('data_updated', dict({'type': kind, 'action': action}, **extra))


def error_response(e):
    if isinstance(e, ValidationError):
        return jsonify({'success': False, 'error': str(e)}), 400
    if isinstance(e, NotFoundError):
        return jsonify({'success': False, 'error': str(e)}), 404
    logger.error(f"Unexpected error in {request.endpoint}: {type(e).__name__}: {e}")
    return jsonify({'success': False, 'error': 'Internal server error'}), 500


def card_to_dict(card):
    data = card.to_dict()
    data['logo'] = manager.card_logo(card)
    return data


def report_to_dict(report):
    return {
        'month': report['month'],
        'cards': [card_to_dict(c) for c in report['cards']],
        'totalsByCard': report['totals_by_card'],
        'total': report['total'],
        'rows': [
            {
                'purchase': row['purchase'].to_dict(),
                'card': card_to_dict(row['card']) if row['card'] else None,
                'index': row['index'],
                'remaining': row['remaining'],
                'totalValue': row['total_value'],
            }
            for row in report['rows']
        ],
        'trend': report['trend'],
    }


def page_month():
    month = request.args.get('month')
    return month if is_month_key(month) else current_month_key()


# Pages
@app.route('/')
def index():
    return render_template('index.html', month=page_month())


@app.route('/cartoes')
def cards_page():
    return render_template('cards.html', month=page_month())


@app.route('/sobre')
def about():
    return render_template('about.html')


# Monthly ledger
@app.route('/api/monthly/<month>')
def get_monthly(month):
    try:
        transactions = manager.get_monthly(month)
        return jsonify({
            'month': month,
            'title': month_title(month),
            'transactions': [t.to_dict() for t in transactions],
            'summary': manager.get_monthly_summary(month)
        })
    except Exception as e:
        return error_response(e)


@app.route('/api/available-months')
def get_available_months():
    return jsonify(manager.get_available_months())


@app.route('/api/monthly/<month>', methods=['POST'])
def add_transaction(month):
    data = request.get_json(silent=True) or {}
    try:
        transaction = manager.add_transaction(
            month_key=month,
            type=data.get('type'),
            title=data.get('title'),
            amount=data.get('amount')
        )
        notify('transaction', 'add', month=month)
        return jsonify({'success': True, 'transaction': transaction.to_dict()}), 201
    except Exception as e:
        return error_response(e)


@app.route('/api/monthly/<month>/<transaction_id>', methods=['PUT'])
def update_transaction(month, transaction_id):
    data = request.get_json(silent=True) or {}
    try:
        transaction = manager.update_transaction(month, transaction_id, data.get('title'), data.get('amount'))
        notify('transaction', 'update', month=month)
        return jsonify({'success': True, 'transaction': transaction.to_dict()})
    except Exception as e:
        return error_response(e)


@app.route('/api/monthly/<month>/<transaction_id>', methods=['DELETE'])
def remove_transaction(month, transaction_id):
    try:
        items = manager.remove_transaction(month, transaction_id)
        notify('transaction', 'delete', month=month)
        return jsonify({'success': True, 'transactions': [t.to_dict() for t in items]})
    except Exception as e:
        return error_response(e)


@app.route('/api/monthly/<month>/<transaction_id>/toggle-paid', methods=['POST'])
def toggle_paid(month, transaction_id):
    try:
        items = manager.toggle_paid(month, transaction_id)
        notify('transaction', 'toggle_paid', month=month)
        return jsonify({'success': True, 'transactions': [t.to_dict() for t in items]})
    except Exception as e:
        return error_response(e)


@app.route('/api/monthly/<month>/replicate', methods=['POST'])
def replicate_month(month):
    data = request.get_json(silent=True) or {}
    try:
        target = data.get('target')
        if target:
            items = manager.replicate_month(month, target)
        else:
            items = manager.replicate_to_next_month(month)
            target = add_months(month, 1)
        notify('transaction', 'replicate', month=target)
        return jsonify({
            'success': True,
            'target': target,
            'message': f"Dados replicados para {month_title(target)}.",
            'transactions': [t.to_dict() for t in items]
        })
    except Exception as e:
        return error_response(e)


@app.route('/api/monthly/<month>', methods=['DELETE'])
def clear_month(month):
    try:
        manager.clear_month(month)
        notify('transaction', 'clear', month=month)
        return jsonify({'success': True, 'transactions': []})
    except Exception as e:
        return error_response(e)


@app.route('/export/<month>')
def export_month(month):
    try:
        transactions = manager.get_monthly(month)
    except Exception as e:
        return error_response(e)

    def generate():
        # Excel needs BOM to recognize UTF-8
        yield '\ufeff'

        data = io.StringIO()
        w = csv.writer(data)

        w.writerow(('ID', 'Tipo', 'Titulo', 'Valor', 'Pago'))
        yield data.getvalue()
        data.seek(0)
        data.truncate(0)

        for t in transactions:
            w.writerow((
                t.id,
                t.type,
                t.title,
                t.amount,
                '' if t.paid is None else ('sim' if t.paid else 'nao')
            ))
            yield data.getvalue()
            data.seek(0)
            data.truncate(0)

    response = Response(generate(), mimetype='text/csv')
    response.headers.set("Content-Disposition", "attachment", filename=f"lancamentos-{month}.csv")
    return response


# Cards
@app.route('/api/cards')
def get_cards():
    return jsonify([card_to_dict(c) for c in manager.get_cards()])


@app.route('/api/cards', methods=['POST'])
def create_card():
    data = request.get_json(silent=True) or {}
    try:
        card = manager.save_card(data.get('name'), data.get('bank'), data.get('color'))
        notify('card', 'add')
        return jsonify({'success': True, 'card': card_to_dict(card)}), 201
    except Exception as e:
        return error_response(e)


@app.route('/api/cards/<card_id>', methods=['PUT'])
def update_card(card_id):
    data = request.get_json(silent=True) or {}
    try:
        card = manager.save_card(data.get('name'), data.get('bank'), data.get('color'), card_id=card_id)
        notify('card', 'update')
        return jsonify({'success': True, 'card': card_to_dict(card)})
    except Exception as e:
        return error_response(e)


@app.route('/api/cards/<card_id>', methods=['DELETE'])
def remove_card(card_id):
    try:
        result = manager.remove_card(card_id)
        notify('card', 'delete')
        return jsonify({
            'success': True,
            'cards': [card_to_dict(c) for c in result['cards']],
            'purchases': [p.to_dict() for p in result['purchases']]
        })
    except Exception as e:
        return error_response(e)


@app.route('/api/cards/report')
def get_card_report():
    try:
        report = manager.get_card_report(request.args.get('month'))
        return jsonify(report_to_dict(report))
    except Exception as e:
        return error_response(e)


# Purchases
@app.route('/api/purchases')
def get_purchases():
    return jsonify([p.to_dict() for p in manager.get_purchases()])


@app.route('/api/purchases', methods=['POST'])
def create_purchase():
    data = request.get_json(silent=True) or {}
    try:
        purchase = manager.save_purchase(
            card_id=data.get('cardId'),
            title=data.get('title'),
            total_installments=data.get('totalInstallments', 1),
            current_installment=data.get('currentInstallmentAtStart', 1),
            installment_amount=data.get('installmentAmount'),
            month_key=data.get('month')
        )
        notify('purchase', 'add')
        return jsonify({'success': True, 'purchase': purchase.to_dict()}), 201
    except Exception as e:
        return error_response(e)


@app.route('/api/purchases/<purchase_id>', methods=['PUT'])
def update_purchase(purchase_id):
    data = request.get_json(silent=True) or {}
    try:
        purchase = manager.save_purchase(
            card_id=data.get('cardId'),
            title=data.get('title'),
            total_installments=data.get('totalInstallments', 1),
            current_installment=data.get('currentInstallmentAtStart', 1),
            installment_amount=data.get('installmentAmount'),
            purchase_id=purchase_id
        )
        notify('purchase', 'update')
        return jsonify({'success': True, 'purchase': purchase.to_dict()})
    except Exception as e:
        return error_response(e)


@app.route('/api/purchases/<purchase_id>', methods=['DELETE'])
def remove_purchase(purchase_id):
    try:
        items = manager.remove_purchase(purchase_id)
        notify('purchase', 'delete')
        return jsonify({'success': True, 'purchases': [p.to_dict() for p in items]})
    except Exception as e:
        return error_response(e)


if __name__ == '__main__':
    socketio.run(app, host=config.HOST, port=config.PORT or 5000, debug=True)
