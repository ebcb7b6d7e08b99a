"""
Test suite for pell-magic-squares

Contains:
- tests/unit/          : Unit tests for individual modules (oracle, generator,
                         assembler, checkpoint, sweep driver, coordinator, CLI)
"""
