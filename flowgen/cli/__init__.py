"""FlowGen command line tools."""
