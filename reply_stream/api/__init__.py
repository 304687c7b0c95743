"""
HTTP surface of the Reply Stream Service.
"""
