"""Layout modules: scales, text wrapping and annotation box placement. No drawing."""
