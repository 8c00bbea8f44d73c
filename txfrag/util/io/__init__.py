#!/usr/bin/env python
"""Stream filters, progress writers, and file openers"""
