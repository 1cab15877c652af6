# ---------- constants.py ----------
"""Project-wide constants shared by services and pages."""
from typing import Dict, List

PRODUCT_CATEGORIES: Dict[str, str] = {
    "FRAME": "Armação",
    "LENS": "Lente",
    "CONTACT_LENS": "Lente de Contato",
    "ACCESSORY": "Acessório",
}

# Service order lifecycle, in the only order it may be walked
ORDER_STATUS_FLOW: List[str] = [
    "PENDING",
    "LAB_SENT",
    "ASSEMBLY",
    "QA",
    "READY",
    "DELIVERED",
]
ORDER_STATUS_LABELS: Dict[str, str] = {
    "PENDING": "Pendente",
    "LAB_SENT": "Enviado Lab",
    "ASSEMBLY": "Montagem",
    "QA": "Controle Qualidade",
    "READY": "Pronto",
    "DELIVERED": "Entregue",
}

TRANSACTION_TYPES: Dict[str, str] = {
    "INCOME": "Entrada",
    "EXPENSE": "Saída",
}
TRANSACTION_STATUSES: Dict[str, str] = {
    "PAID": "Pago",
    "PENDING": "Pendente",
}
TRANSACTION_CATEGORIES: List[str] = [
    "Vendas",
    "Serviços",
    "Fornecedores",
    "Custos Fixos",
    "Funcionários",
    "Outros",
]
DEFAULT_TRANSACTION_CATEGORY = "Outros"
SALES_CATEGORY = "Vendas"

PAYMENT_METHODS: Dict[str, str] = {
    "CREDIT_CARD": "Cartão de Crédito",
    "DEBIT_CARD": "Cartão de Débito",
    "CASH": "Dinheiro",
    "PIX": "PIX",
    "BOLETO": "Boleto",
}

EMPLOYEE_ROLES: Dict[str, str] = {
    "employee": "Funcionário",
    "admin": "Administrador",
}

WALK_IN_CLIENT = "Cliente Balcão"
MIN_STOCK_DEFAULT: int = 5
DELIVERY_DAYS_DEFAULT: int = 7
RECALL_MONTH_OPTIONS: List[int] = [6, 12, 18]
RECALL_MESSAGE_DEFAULT = (
    "Olá {nome}, tudo bem? Já faz um tempo que você fez seus óculos na {loja}. "
    "Que tal agendar uma revisão gratuita?"
)

CSV_HEADER: List[str] = [
    "Data",
    "Descrição",
    "Categoria",
    "Método de Pagamento",
    "Status",
    "Tipo",
    "Valor",
]

# Sidebar menu labels (keep in sync across app and sidebar)
MENU_DASHBOARD = "\U0001F4CA Dashboard"
MENU_NEW_SALE = "\U0001F6D2 Nova Venda / O.S."
MENU_CASH_FLOW = "\U0001F45B Lançar Caixa"
MENU_FINANCIAL = "\U0001F4B2 Financeiro"
MENU_CLIENTS = "\U0001F465 Clientes (CRM)"
MENU_ORDERS = "\U0001F4CB Ordens de Serviço"
MENU_INVENTORY = "\U0001F4E6 Estoque"
MENU_EMPLOYEES = "\U0001F9D1\u200D\U0001F4BC Funcionários"
