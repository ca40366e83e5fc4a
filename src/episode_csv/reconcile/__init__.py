"""Column resolution, episode-set reconciliation and the end-to-end pipeline.

Submodules:
  schema      -- request / result Pydantic models
  columns     -- header alias resolution (episode number, title)
  reconciler  -- delete / keep filtering and episode inventory
  transforms  -- title cleaning, column removal, overview normalization
  pipeline    -- parse_export / process_export / analyze_export entry points
"""
