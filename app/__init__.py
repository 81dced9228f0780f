"""Notification service for the crowdwork marketplace.

Keeping this file makes ``app`` a regular package so the local modules win
over similarly named distributions installed in site-packages.
"""
