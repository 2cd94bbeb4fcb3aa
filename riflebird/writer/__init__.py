from .unit_test_writer import PatternResult, UnitTestWriter

__all__ = ["PatternResult", "UnitTestWriter"]
