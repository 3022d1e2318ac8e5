"""
Kubernetes cluster health monitor with a simulated, hysteresis-based autoscaler
"""

__version__ = "1.0.0"
