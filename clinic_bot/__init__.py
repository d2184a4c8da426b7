"""Aave clinic bots: batch liquidations and bad debt repayment through the ClinicSteward."""

__version__ = "0.1.0"
