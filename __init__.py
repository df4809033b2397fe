"""
EcoRide Support Agent - Customer support chat backend
=====================================================

A keyword-driven support assistant for EcoRide electric scooters:
1. Fixed rule table for common questions
2. Knowledge base keyword search over published help articles

Author: EcoRide Support Team
License: MIT
Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "EcoRide Support Team"
__license__ = "MIT"
