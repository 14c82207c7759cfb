"""Presentation layer for the review queue.

- views: stage grouping, payback multiplier, display formatters
- board: DealBoard, the list/detail state machine the web client drives
- client: DashboardClient, an httpx client for the deal review API
"""
