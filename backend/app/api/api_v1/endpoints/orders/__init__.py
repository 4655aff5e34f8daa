"""
API de ventas

Dividida en submódulos, cada uno con su propio router bajo /orders:
- core: número de venta, respuestas y consultas comunes
- crud: alta, consulta, actualización y borrado
- actions: anulación
- receipts: comprobante en JSON y en texto
- stock_ops: movimientos de stock
"""
