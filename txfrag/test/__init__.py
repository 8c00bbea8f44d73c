#!/usr/bin/env python
"""Unit and functional tests for :data:`txfrag`

    ===========================   =====================================================
    **Package**                   **Contents**
    ---------------------------   -----------------------------------------------------
    :py:mod:`txfrag.test.unit`         Tests of individual functions and classes
    :py:mod:`txfrag.test.functional`   Tests of command-line scripts, run end to end
    ===========================   =====================================================

Test data are built on the fly in temporary folders by helpers in
:py:mod:`txfrag.test.common`.
"""
