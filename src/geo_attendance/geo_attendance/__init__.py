"""Geofenced attendance package.

Organized by feature modules (geo, locations, attendance) with a thin Flask
controller layer on top of service/repository layers.
"""
