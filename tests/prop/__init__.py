"""
Property-based checks over random instruction words for every shipped
architecture: decoding, lifting and the decoder tables themselves.
"""
