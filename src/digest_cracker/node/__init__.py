"""Remote Search Service: node-side service and coordinator-side client."""
