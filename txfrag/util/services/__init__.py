#!/usr/bin/env python
"""Exception and warning types, and warning filters, used throughout :data:`txfrag`"""
