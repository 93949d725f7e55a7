"""Weekday capacity rules, date overrides and availability evaluation"""
