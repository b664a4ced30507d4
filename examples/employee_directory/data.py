from dataclasses import dataclass


@dataclass
class Employee:
    id: str
    name: str
    role: str
    department: str
    email: str


employees = [
    Employee("1", "Alice Johnson", "Senior Engineer", "Engineering", "alice@org.com"),
    Employee("2", "Bob Smith", "Product Manager", "Product", "bob@org.com"),
    Employee("3", "Charlie Davis", "Designer", "Design", "charlie@org.com"),
    Employee("4", "Diana Prince", "CTO", "Executive", "diana@org.com"),
]
