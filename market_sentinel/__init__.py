"""
Market Sentinel
Weekly dollar-cost-averaging decision engine with a dual-pool fund.
"""

__version__ = "1.0.0"
