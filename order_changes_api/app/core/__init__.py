"""Process‑wide concerns: settings, logging, errors and the database handle."""
