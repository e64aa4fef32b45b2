from typing import NamedTuple


class ModelParams(NamedTuple):
    """
    Physical model parameters read by the classifier and the driver.
    
    Attributes
    ----------
    gamma : float
        Ratio of specific heats.
    gas_r : float
        Specific gas constant.
    ibm_layer : int
        Ghost layers (counted from the surface) reconstructed by the method
        of image; deeper layers are extrapolated from the previous layer.
    """
    gamma: float = 1.4
    gas_r: float = 287.058
    ibm_layer: int = 1
