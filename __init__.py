"""Expense Forecaster.

Forecasts next month's spending per category from stored transactions and
suggests categories for new ones.  See ``forecasting.py`` and
``categorization.py`` for the core, ``mcp_server.py`` for the HTTP tools and
``export_training_data.py`` for the training-table export.
"""
