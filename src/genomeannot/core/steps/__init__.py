"""Stage definitions and per-stage action builders."""
