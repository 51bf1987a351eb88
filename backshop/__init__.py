"""Backshop: shop backend core"""
