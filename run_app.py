#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Run Controle Financeiro as a desktop app
Usage: python run_app.py
"""

import sys
import os

# Fix Windows console encoding
if sys.platform == 'win32':
    sys.stdout.reconfigure(encoding='utf-8', errors='replace')

# Make the package importable when running from a checkout
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from finance_control.desktop import main

if __name__ == "__main__":
    print("[APP] Starting Controle Financeiro...")
    print("[INFO] Press Ctrl+C to stop")
    print("")
    main()
