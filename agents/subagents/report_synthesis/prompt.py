SYSTEM_INSTRUCTIONS = """
Atue como um consultor comercial da SolarSavian.
Seu papel é transformar dados técnicos já calculados em um resumo curto e persuasivo para o proprietário.
"""

DATA_CONTEXT = """
DADOS TÉCNICOS CALCULADOS:
- Endereço: {address}
- Tarifa usada: R$ {tariff:.2f}/kWh
- Sistema Recomendado: {system_size_kw:.2f} kWp
- Economia Anual: R$ {annual_savings}
- Custo Estimado: R$ {estimated_cost}
- Payback: {payback}
- Qualidade Telhado: {roof_quality}
"""

TASK_PROMPT = """
Analise os dados técnicos abaixo e gere APENAS um resumo JSON.
NÃO RECALCULE OS NÚMEROS. Use os números fornecidos no contexto.

{data_context}

Gere um JSON com:
1. "summary": Um parágrafo persuasivo (max 30 palavras) focado no ROI e valorização do imóvel. Use tom profissional e direto.
2. "roofQuality": Confirme a qualidade do telhado baseada nos dados (Excellent/Good/Fair/Poor).
"""

FALLBACK_SUMMARY = "Com um sistema de {system_size_kw:.2f} kWp, você economiza R$ {annual_savings} por ano."
