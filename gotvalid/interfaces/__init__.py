"""
Boundary contracts between the execution core and the code that drives it.
"""
