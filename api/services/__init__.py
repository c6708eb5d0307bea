"""Service layer for business logic.

Services encapsulate all business logic, keeping routes thin and focused
on HTTP handling. This separation provides:
- Clear business rules in one place
- Orchestration of repository calls
- Translation of persistence failures into ServiceError results

Layer hierarchy:
    Routes (HTTP) -> Services (Business Logic) -> Repositories (Database)

Services should:
- Contain all business rules (duplicate detection, existence checks)
- Orchestrate calls to repositories
- Return Ok / ServiceError results for expected outcomes

Services should NOT:
- Directly execute SQL queries (use repositories)
- Know about HTTP request/response details (status codes, headers)
- Commit transactions (the request's session dependency does that)
"""
