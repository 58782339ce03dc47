"""
Generation pipeline services
"""
