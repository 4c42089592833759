"""tx-composer — compose, validate and assemble Cosmos SDK transactions."""

__version__ = "0.1.0"
