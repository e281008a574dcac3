# Services package.
#
# Each module exposes a focused set of async functions that run the
# validate -> persist -> shape flow for one resource:
#
#   auth_service      - register / login, token issuance
#   category_service  - list / create / update / soft-delete for Category
#   article_service   - search + pagination, CRUD and soft-delete for Article
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.  Validation failures raise ``ValidationFailure``;
# a missing record is reported by returning None / False.
