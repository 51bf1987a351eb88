"""Celery tasks"""
