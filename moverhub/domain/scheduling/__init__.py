"""Scheduled jobs: the records that consume slot capacity"""
