"""
Product service for the Fresh Bonds marketplace.

Farmers list their produce; anyone may browse visible products. Only the
owning farmer, or an administrator, may change or remove a product.
"""
