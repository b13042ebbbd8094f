"""External infrastructure: database and security"""
