#!/usr/bin/env python3
"""
perf-switcher keeps the asusd platform profile (Quiet/Balanced/Performance)
in sync with a desktop status menu.
"""
