"""External contract boundary: ABI, protocol, web3 implementation."""
