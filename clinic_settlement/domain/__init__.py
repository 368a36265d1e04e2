"""Pure settlement, pricing, profitability and cash flow logic"""
