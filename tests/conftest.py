import matplotlib

# Headless backend for surface and animation tests
matplotlib.use("Agg")
