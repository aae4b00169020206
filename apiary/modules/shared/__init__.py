"""
Shared building blocks for hive services: exceptions, constants, pure
formulas, tagged results and the BaseService foundation.
"""
