"""MoverHub reservations API"""
