"""
CSV export for FootyExport.

- `csv_exporter` serializes one row-set and writes it under a deterministic name.
- `orchestrator` writes the train, test and full artifacts of a run.
- `export_pipeline` wires everything together into a CLI-style script.
"""
