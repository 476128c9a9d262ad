"""
Signing gateway for AK/SK authenticated upstream APIs.
"""
