"""
Redbard IDM - Services
"""
