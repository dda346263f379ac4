"""Review domain: types, tone catalog, prompts and heuristics."""
