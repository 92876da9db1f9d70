"""Core extraction, batching and timing modules.

WHY: The core package holds the pure, network-free parts of the
pipeline: the IR dataclasses, srv3 extraction, batch planning, and the
two timing passes. They are testable with synthetic batch outputs.

HOW: ir.py defines the data structures, extractor.py builds word
timings from srv3, planner.py slices batches and settles continuation,
reconciler.py and assembler.py turn candidates into the final track.

RULES:
- No HTTP and no file output in this package
- Batch state is passed explicitly between planner calls
"""
