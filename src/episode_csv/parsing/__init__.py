"""Tokenizing, validating, repairing and serializing episode exports.

Submodules:
  patterns    -- compiled regex patterns and constant tuples
  schema      -- Table / RectangularTable / Diagnostic Pydantic models
  tokenizer   -- character-level state machine (text -> Table)
  validation  -- row-shape validator (pad / truncate to header width)
  repair      -- line-resynchronization repair for corrupted exports
  serializer  -- Table -> text, the tokenizer's inverse
"""
