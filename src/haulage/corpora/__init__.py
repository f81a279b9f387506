"""Demo colonies for running the logistics network headlessly."""
