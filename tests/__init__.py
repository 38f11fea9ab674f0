"""Test package for Sandpaper Letters.

Core tests drive the tracing session headlessly through its public handlers
with fake clocks and in-memory canvases.  The smoke tests run the pygame loop
with SDL's dummy video driver so no real window opens.  Run ``pytest`` from
the project root.
"""
