import unicodedata

DEFAULT_CARD_COLOR = '#7C3AED'

BANK_COLORS = {
    'itau': '#EC7000',
    'nubank': '#820AD1',
    'bradesco': '#CC092F',
    'santander': '#C40000',
    'bb': '#FFCC00',
    'banco do brasil': '#FFCC00',
    'caixa': '#005CA9',
    'inter': '#FF7A00',
    'original': '#00A859',
    'neon': '#00E6CC',
    'c6': '#222222',
    'credicard': '#0066CC',
}

# Substring matches tried in order when the exact name is unknown
BANK_ALIASES = (
    'itau', 'nubank', 'bradesco', 'santander', 'banco do brasil', 'caixa',
    'inter', 'original', 'neon', 'c6', 'credicard',
)

BANK_LOGOS = {
    'itau': '/static/banks/itau.svg',
    'nubank': '/static/banks/nubank.svg',
    'banco do brasil': '/static/banks/bb.svg',
    'bb': '/static/banks/bb.svg',
}


def normalize_bank_name(name):
    """Lowercase, trimmed and without accents ("Itaú " -> "itau")"""
    decomposed = unicodedata.normalize('NFD', name or '')
    stripped = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower().strip()


def _match(key, table):
    if key in table:
        return table[key]
    for name in BANK_ALIASES:
        if name in key and name in table:
            return table[name]
    return None


def bank_color_for(bank, fallback=DEFAULT_CARD_COLOR):
    return _match(normalize_bank_name(bank), BANK_COLORS) or fallback


def bank_logo_for(bank):
    return _match(normalize_bank_name(bank), BANK_LOGOS)
