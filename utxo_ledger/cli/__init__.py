"""UTXO Ledger - Command Line Interface"""
