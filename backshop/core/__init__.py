"""Core configuration, database and errors"""
