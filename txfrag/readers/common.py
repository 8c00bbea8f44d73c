#!/usr/bin/env python
"""Helper functions shared by annotation readers"""


def get_identical_attributes(features, exclude=None):
    """Return a dictionary of all key-value pairs that are identical for all
    |SegmentChains| in `features`

    Parameters
    ----------
    features : list
        list of |SegmentChains|

    exclude : set, optional
        attributes to exclude from identity criteria

    Returns
    -------
    dict
    """
    if len(features) == 0:
        return {}

    exclude = set() if exclude is None else set(exclude)
    first = features[0].attr
    common_keys = set(first.keys()) - exclude
    for feature in features[1:]:
        common_keys &= set(feature.attr.keys())

    return {K: first[K] for K in common_keys if all(X.attr[K] == first[K] for X in features)}
