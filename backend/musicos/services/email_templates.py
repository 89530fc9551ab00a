"""HTML email bodies. Every interpolated value is escaped."""
from html import escape, unescape
from typing import Mapping, Tuple

SIGNATURE = "<p>Equipa MúsicosBooking.pt</p>"


def _e(value, default: str = "") -> str:
    if value is None or value == "":
        return escape(default)
    # sanitized form values arrive escaped already; unescape first so they are not escaped twice
    return escape(unescape(str(value)))


def quote_request_operator(data: Mapping) -> Tuple[str, str]:
    subject = f"Novo Pedido de Orçamento - {data.get('tipoEvento', '')}"
    html = f"""
<h2>Novo Pedido de Orçamento - MúsicosBooking</h2>
<p><strong>Nome:</strong> {_e(data.get('nome'))}</p>
<p><strong>Email:</strong> {_e(data.get('email'))}</p>
<p><strong>Telefone:</strong> {_e(data.get('telefone'))}</p>
<p><strong>Tipo de Evento:</strong> {_e(data.get('tipoEvento'))}</p>
<p><strong>Data do Evento:</strong> {_e(data.get('dataEvento'))}</p>
<p><strong>Localização:</strong> {_e(data.get('localizacao'))}</p>
<p><strong>Estilo Musical:</strong> {_e(data.get('estiloMusical'), 'Não especificado')}</p>
<p><strong>Orçamento:</strong> {_e(data.get('orcamento'), 'Não especificado')}</p>
<p><strong>Mensagem:</strong><br>{_e(data.get('mensagem'))}</p>
"""
    return subject, html


def quote_request_confirmation(data: Mapping) -> Tuple[str, str]:
    subject = "Pedido de Orçamento Recebido - MúsicosBooking"
    html = f"""
<h2>Obrigado pelo seu pedido!</h2>
<p>Olá {_e(data.get('nome'))},</p>
<p>Recebemos o seu pedido de orçamento para {_e(data.get('tipoEvento'))} em {_e(data.get('dataEvento'))}.</p>
<p>Entraremos em contacto em breve com mais informações.</p>
<br>
<p>Atenciosamente,<br>Equipa MúsicosBooking</p>
"""
    return subject, html


def registration(nome: str, tipo: str) -> Tuple[str, str]:
    subject = "Bem-vindo ao MúsicosBooking.pt!"
    html = f"""
<h2>Olá {_e(nome)}!</h2>
<p>Bem-vindo à plataforma MúsicosBooking.pt</p>
<p>O seu registo foi realizado com sucesso como <strong>{_e(tipo)}</strong>.</p>
<p>Obrigado por se juntar a nós!</p>
{SIGNATURE}
"""
    return subject, html


def order_created(nome: str, reference: str, amount: str, instructions: str) -> Tuple[str, str]:
    subject = f"Pedido registado - Referência {reference}"
    html = f"""
<h2>Pedido registado!</h2>
<p>Olá {_e(nome)},</p>
<p>O seu pedido foi registado com a referência <strong>{_e(reference)}</strong>
no valor de <strong>€{_e(amount)}</strong>.</p>
<pre>{_e(instructions)}</pre>
<p>Aguardamos a confirmação do seu pagamento.</p>
{SIGNATURE}
"""
    return subject, html


def payment_received(nome: str, reference: str, amount: str, method: str) -> Tuple[str, str]:
    subject = "Pagamento Confirmado"
    html = f"""
<h2>Pagamento Confirmado!</h2>
<p>Olá {_e(nome)},</p>
<p>Confirmamos o recebimento do seu pagamento:</p>
<ul>
    <li><strong>Referência:</strong> {_e(reference)}</li>
    <li><strong>Valor:</strong> €{_e(amount)}</li>
    <li><strong>Método:</strong> {_e(method)}</li>
</ul>
<p>A sua reserva está agora confirmada!</p>
{SIGNATURE}
"""
    return subject, html


def password_reset(nome: str, token: str) -> Tuple[str, str]:
    subject = "Recuperação de Password"
    html = f"""
<h2>Recuperação de Password</h2>
<p>Olá {_e(nome)},</p>
<p>Recebemos um pedido para recuperar a sua password.</p>
<p>Use o código abaixo para definir uma nova password (válido durante 1 hora):</p>
<p><strong>{_e(token)}</strong></p>
<p>Se não fez este pedido, ignore este email.</p>
{SIGNATURE}
"""
    return subject, html
