"""
Library modules of the hackpl package. The units are thin wrappers around the decoders found here;
the complete pipeline from a packed issue to its plaintext articles lives in `hackpl.lib.decoder`.
"""
