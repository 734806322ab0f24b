"""Hand-rolled feed-forward scoring network."""

from chester.nn.activations import Activation
from chester.nn.costs import Cost
from chester.nn.layer import Layer, MalformedNetworkError, NetworkShapeError
from chester.nn.network import PolicyValueNetwork

__all__ = [
    "Activation",
    "Cost",
    "Layer",
    "MalformedNetworkError",
    "NetworkShapeError",
    "PolicyValueNetwork",
]
