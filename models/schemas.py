from pydantic import BaseModel, model_validator
from typing import Optional, List, Any, Literal


Regime = Literal["SN", "LP", "LR"]           # Simples, Lucro Presumido, Lucro Real
TipoOperacao = Literal["MERCADORIA", "SERVICO"]
MetodoPreco = Literal["MARKUP", "MARGIN"]


class ItemInput(BaseModel):
    id: str
    nome: str = ""
    un: str = ""
    qtd: Optional[float] = None
    preco: Optional[float] = None
    categoria: str = ""


class ParametrosFiscais(BaseModel):
    """
    Parâmetros fiscais do orçamento. Todos os campos coexistem independente do
    regime/tipo de operação; alíquotas ausentes valem 0 no cálculo.
    """
    # núcleo
    regime: Regime = "SN"
    tipoOperacao: TipoOperacao = "MERCADORIA"
    cfop: Optional[str] = None
    naturezaOperacao: Optional[str] = None
    ncm: Optional[str] = None   # mercadorias
    cest: Optional[str] = None
    nbs: Optional[str] = None   # serviços
    precoVenda: Optional[float] = None  # preço efetivo para os KPIs

    # comuns
    descontoPct: Optional[float] = None
    descontoValor: Optional[float] = None
    frete: Optional[float] = None
    seguro: Optional[float] = None
    outrosCustos: Optional[float] = None

    # flags de composição de base
    compoeBaseICMS: bool = False
    compoeBasePisCofins: bool = False
    compoeBaseIPI: bool = False

    # ICMS / ICMS-ST / FCP / DIFAL
    cst: Optional[str] = None    # LP/LR
    csosn: Optional[str] = None  # Simples Nacional
    origemMercadoria: Optional[str] = None
    icmsAliq: Optional[float] = None
    icmsRedBasePct: Optional[float] = None
    icmsStMva: Optional[float] = None
    icmsStAliq: Optional[float] = None
    fcpAliq: Optional[float] = None
    fcpStAliq: Optional[float] = None
    difalAliqInter: Optional[float] = None
    difalAliqInterna: Optional[float] = None
    difalPartilhaDestinoPct: Optional[float] = None

    # IPI
    ipiCst: Optional[str] = None
    ipiAliq: Optional[float] = None

    # PIS/COFINS
    pisCst: Optional[str] = None
    pisAliq: Optional[float] = None
    cofinsCst: Optional[str] = None
    cofinsAliq: Optional[float] = None

    # ISS + retenções (informativos)
    municipioIncidencia: Optional[str] = None
    issAliq: Optional[float] = None
    issRetido: bool = False
    irrfAliq: Optional[float] = None
    inssAliq: Optional[float] = None
    csllAliq: Optional[float] = None
    pisRetAliq: Optional[float] = None
    cofinsRetAliq: Optional[float] = None

    # nomes antigos das alíquotas, usados só quando o campo *Aliq falta
    icmsPct: Optional[float] = None
    pisPct: Optional[float] = None
    cofinsPct: Optional[float] = None
    issPct: Optional[float] = None

    @property
    def codigo_situacao_icms(self) -> Optional[str]:
        """CSOSN for Simples Nacional, CST otherwise."""
        return self.csosn if self.regime == "SN" else self.cst


class FlagsCusto(BaseModel):
    icmsAsCost: bool = False
    pisCofinsAsCost: bool = False
    ipiAsCost: bool = False
    issAsCost: bool = False


class PricingInput(FlagsCusto):
    method: MetodoPreco = "MARGIN"
    markupPct: float = 20   # % sobre custo
    marginPct: float = 25   # % margem alvo

    @model_validator(mode="after")
    def _margem_abaixo_de_100(self):
        # só o método MARGIN divide por (1 - margem/100)
        if self.method == "MARGIN" and self.marginPct >= 100:
            raise ValueError("Margem alvo deve ser menor que 100%")
        return self


class OrcamentoInput(BaseModel):
    itens: List[ItemInput] = []
    fiscal: ParametrosFiscais = ParametrosFiscais()


class PrecificacaoInput(OrcamentoInput):
    pricing: PricingInput = PricingInput()
    precoAprovado: Optional[float] = None


class RevisaoInput(OrcamentoInput):
    flags: FlagsCusto = FlagsCusto()
    precoVenda: Optional[float] = None


class CalculoResponse(BaseModel):
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
