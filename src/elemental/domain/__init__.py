"""Domain layer: deployment descriptors, image definitions and errors.

Pure models and validation rules. The domain layer performs no process
execution; the only I/O it owns is reading description files.
"""
