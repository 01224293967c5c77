"""fragment-grid — content-driven grid packing for fragment cards.

Subpackages:
  layout   size estimation, occupancy grid, placement search and the
           position reconciler that turns fragments into a layout
  web      FastAPI service exposing the layout engine over HTTP
"""
