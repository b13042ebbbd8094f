"""Domain models and rules"""
