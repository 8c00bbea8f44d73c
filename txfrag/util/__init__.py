#!/usr/bin/env python
"""Miscellaneous, general utilities useful for scripting

Package overview
================

    ===================================   ==============================================================
    **Subpackages**                       **Contents**
    -----------------------------------   --------------------------------------------------------------
    :py:obj:`~txfrag.util.io`              Wrappers for file I/O, progress printing, and output tables
    :py:obj:`~txfrag.util.scriptlib`       Tools for writing command-line scripts that use :data:`txfrag`
    :py:obj:`~txfrag.util.services`        Exceptions, warnings, and warning filters
    ===================================   ==============================================================
"""
