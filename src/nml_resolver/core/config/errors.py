# src/nml_resolver/core/config/errors.py
"""
Exceções da camada de configuração do nml_resolver.

Cobrem exclusivamente o carregamento de arquivos declarativos (settings
da ferramenta e fontes de catálogo) e o deep-merge de settings. Falhas
de resolução de namelist vivem em `nml_resolver.core.exceptions`.

Invariantes:
    - Todas as exceções desta camada herdam de `ConfigError`
    - Nenhuma delas representa violação de regra de domínio

Limites explícitos:
    - Não realiza fallback ou recovery
    - Não depende de Engine, Resolver ou CLI
"""


class ConfigError(Exception):
    """
    Exceção base para falhas de configuração estrutural.

    Permite que a CLI e os loaders de catálogo capturem, em um único
    ponto, qualquer erro de leitura ou merge de arquivos declarativos.
    """


class ConfigFileNotFoundError(ConfigError):
    """
    Arquivo declarativo obrigatório não encontrado.

    Levantada tanto para o arquivo de settings padrão quanto para
    fontes de schema/defaults/use-case lidas via `load_source_file`.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Extensão de arquivo não suportada pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)

    Limites explícitos:
        - Não tenta inferir formato por conteúdo
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Conteúdo raiz do arquivo não é um mapa chave-valor.

    Listas ou escalares no root são rejeitados: todas as fontes
    declarativas do projeto são dicionários.
    """


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge de settings.

    Exemplo de conflito:
        - base:     {"engine": {"strict_warnings": false}}
        - override: {"engine": "strict"}

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito
    """
