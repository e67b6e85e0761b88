"""Local HTTP authority serving simulated sessions."""
