"""
Customers module (cadastro de clientes).

Scope:
- JSON REST API: list/filter/paginate, detail, create, partial update,
  soft delete (ativo=false), restore, aggregate stats
- Server-rendered registry page with modal create/edit/view flows

Customers are never hard-deleted; ativo=false is the soft-deleted state.
"""
