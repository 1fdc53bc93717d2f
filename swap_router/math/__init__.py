"""Pricing math: fixed-point conversions and the CMMM invariant engine."""
