"""Time blocks domain: lunch breaks, days off and other periods closed to booking"""
