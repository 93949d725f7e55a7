"""Movers quotes and breakdown handling"""
